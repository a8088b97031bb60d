"""Venues app package.

Hotels, cafes, restaurants and halls together with their bookable
sub-resources (table groups, tables and rooms), plus the image upload and
geocoding endpoints.
"""
