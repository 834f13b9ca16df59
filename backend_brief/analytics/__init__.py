"""
Brief analytics: target resolution, enrichment modules, risk scoring,
narrative and runtime report.

Entry point: brief_pipeline.analyze_brief(query, lang).
"""
