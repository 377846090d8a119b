"""
Exchange Adapters Package

Each venue has its own subfolder with:
- __init__.py: Main exchange class implementing ExchangeInterface
- api_client.py: Signed REST request pipeline
- description.py: Static venue metadata (endpoints, fees, error tokens)
- signer.py / error_classifier.py / catalog.py / normalizer.py: pipeline stages

Adding a venue means adding a subfolder and registering it in ExchangeManager.
"""
