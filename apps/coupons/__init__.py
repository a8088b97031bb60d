"""Coupons app package.

Discount codes and the resolver that turns a code into a discount the
pricing engine can apply.
"""
