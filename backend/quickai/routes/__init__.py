# Routes package init
"""
QuickAI Backend - API Routes Package
=====================================

Route Inventory:
    - ai.py:      POST /api/ai/generate-article
                  POST /api/ai/generate-blog-title
                  POST /api/ai/generate-image
                  POST /api/ai/remove-image-background
                  POST /api/ai/remove-image-object
                  POST /api/ai/resume-review
    - health.py:  GET  /        (liveness text)
                  GET  /health  (dependency status)

Routes stay thin: parse the request, call ActionService, render the envelope.
"""
