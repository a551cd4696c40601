# Middleware package init
"""
QuickAI Backend - Middleware Package
=====================================

Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route
                                                            └─ Depends(get_request_context)

- request_id.py: X-Request-ID correlation id (ContextVar)
- logging.py:    access log on `quickai.access`
- auth.py:       Clerk bearer-token dependency producing the RequestContext
"""
