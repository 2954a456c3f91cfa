"""
AI Module - natural-language understanding for the calendar assistant.

Pipeline:

    user text
        │
        ▼
    ┌──────────────────┐   PROPOSAL_SYSTEM_PROMPT + current time
    │   AIProvider     │   (Gemini / OpenAI / Anthropic, chosen by AI_PROVIDER)
    └────────┬─────────┘
             │ raw JSON-ish text
             ▼
    ┌──────────────────┐
    │ProposalNormalizer│   fences, types, times, ids, participant lookup
    └────────┬─────────┘
             │ Proposal
             ▼
    app.services.assistant_service (matching, confirmation, execution)

Module Structure:
================
- providers/: model backends and build_provider()
- prompts/: system prompt, user prompt template, user-facing messages
- proposal/: Proposal schema and the normalizer
- monitoring/: in-process usage counters (ai_metrics)
"""
