import os

# Name-normalization lookup (OpenAI-compatible chat completions endpoint)
LOOKUP_API_URL = "https://api.openai.com/v1/chat/completions"
LOOKUP_MODEL = "gpt-4o-mini"
LOOKUP_API_KEY_ENV = "OPENAI_API_KEY"
LOOKUP_TIMEOUT_SECONDS = 20


def get_lookup_api_key():
    """API key for the lookup service, or None when not configured."""
    return os.environ.get(LOOKUP_API_KEY_ENV) or None


# Background validation retry policy
VALIDATION_MAX_ATTEMPTS = 3
VALIDATION_BACKOFF_SECONDS = 1.0
