"""
Real Estate Listing API.
"""
