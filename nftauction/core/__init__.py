"""Core components: chain simulator, contracts, configuration and storage"""
