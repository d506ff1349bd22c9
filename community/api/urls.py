# community/api/urls.py
from django.urls import path

from .views import CommentListCreateView, CommentDetailView, RatingView

app_name = "community"

urlpatterns = [
    path("comments/", CommentListCreateView.as_view(), name="comments"),
    path("comments/<uuid:pk>/", CommentDetailView.as_view(), name="comment-detail"),
    path("ratings/", RatingView.as_view(), name="ratings"),
]
