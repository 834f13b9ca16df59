"""
API server package: HTTP interface over the brief pipeline.

POST /api/brief runs one brief per request; nothing is persisted between
requests.
"""
