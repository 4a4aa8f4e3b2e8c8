"""
Vendor catalogs, access-code sharing and the engagement dashboard.
"""
