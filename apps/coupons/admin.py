"""Admin registration for coupons."""

from __future__ import annotations

from django.contrib import admin

from .models import Coupon


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ("code", "discount_type", "value", "is_active", "expires_at")
    list_filter = ("discount_type", "is_active")
    search_fields = ("code",)
