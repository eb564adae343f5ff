"""Business logic services.

Services contain all pricing and repricing logic and are called by routes and scripts.
The pricing engine is deterministic; catalog writes go through an explicit gateway.
"""
