"""
Core Package

Provider-agnostic logic:
- ProviderInterface: Abstract contract for every market-data provider
- PriceService: Registry and fallback orchestrator over the providers
- TTLCache: Freshness-checked, fetch-coalescing cache
- Schemas and errors shared by providers and the HTTP surface
"""
