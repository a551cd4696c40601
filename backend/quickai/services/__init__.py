# Services package init
"""
QuickAI Backend - Services Layer
=================================

Orchestration:
    - ActionService:   the six AI actions (policy → payload → call → persist → quota)
    - quota:           ActionGate policy, independent of any action
    - ActionResult:    success/failure value returned by every action

Gateways (one external collaborator each):
    - LLMService / GeminiService:  text completion
    - RenderService:               Pollinations text-to-image
    - AssetService:                Cloudinary uploads and transformation URLs
    - DocumentService:             pypdf text extraction
    - IdentityService:             Clerk tokens, plan and usage metadata
    - CreationService:             `creations` inserts
    - FileService:                 upload spooling for Cloudinary
"""
