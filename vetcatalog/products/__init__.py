"""
Product management for vendors and product engagement for veterinarians.
"""
