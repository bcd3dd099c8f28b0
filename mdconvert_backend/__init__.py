"""Backend for the Markdown to PDF converter.

Route handlers in server.py stay thin; this package holds the pieces:
- Markdown rendering and allowlist HTML sanitization
- printable document templates and the shared Chromium renderer
- the in-memory stores for shared PDFs (one hour TTL) and feedback
- fixed-window rate limiting for the API

Security note:
Share ids are capability tokens (unguessable UUID4). Anyone with the id can
download that PDF until it expires, so never log the PDF contents or expose
them anywhere but /api/pdf/<id>.
"""
