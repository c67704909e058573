"""Link-preview enrichment and caching for the community site."""
