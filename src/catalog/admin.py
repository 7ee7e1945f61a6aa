"""Admin configuration for the catalog app."""
from django.contrib import admin

from .models import Category, Product, Review


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "created_at")
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "vendor", "category", "price", "inventory", "is_published")
    list_filter = ("is_published", "category")
    search_fields = ("name", "sku", "vendor__email")
    readonly_fields = ("id", "created_at", "updated_at")
    list_select_related = ("vendor", "category")


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("product", "user", "rating", "status", "created_at")
    list_filter = ("status", "rating")
    list_editable = ("status",)
    list_select_related = ("product", "user")
