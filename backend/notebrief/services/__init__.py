# Services package init
"""
NoteBrief Backend: Services Layer
===================================

Service Inventory:
    - GeminiClient:          raw REST calls to the Generative Language API
    - ModelRegistry:         discovers and caches a usable Gemini model
    - content_normalizer:    prompts and GenerationRequest builders
    - RetryExecutor:         tenacity-driven retry on 503 / UNAVAILABLE
    - SummarizationService:  abstract summarizer; GeminiSummarizer implements it
    - DocumentService:       input validation and text extraction
    - SummaryService:        summary persistence and history

Routes depend on the module-level singletons; tests build their own
instances around an httpx.MockTransport.
"""
