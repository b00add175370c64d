"""
FastAPI Application Package

Entry point for the HTTP surface of the aggregator: price and historical
endpoints backed by core.price_service.
"""
