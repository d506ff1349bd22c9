# community/admin.py

from django.contrib import admin
from .models import Comment, Rating


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ["user", "program", "parent", "created_at"]
    search_fields = ["text", "user__email", "program__title"]
    ordering = ["-created_at"]


@admin.register(Rating)
class RatingAdmin(admin.ModelAdmin):
    list_display = ["user", "program", "score", "created_at"]
    list_filter = ["score"]
    search_fields = ["user__email", "program__title"]
    ordering = ["-created_at"]
