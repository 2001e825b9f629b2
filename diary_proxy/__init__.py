"""Privacy-first прокси дневника к OpenRouter."""
