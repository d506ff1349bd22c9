# community/api/views.py
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated, AllowAny

from core.exceptions import ValidationError
from community.services.community_service import CommentService, RatingService
from .serializers import CommentSerializer, RatingSerializer


# ============================================================
# COMMENTS
# ============================================================

class CommentListCreateView(APIView):
    """Program discussion; anyone reads, participants write."""

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get(self, request):
        program_id = request.query_params.get("programId")
        if not program_id:
            raise ValidationError("Program ID is required")

        comments = CommentService().list_comments(
            program_id,
            exercise_id=request.query_params.get("exerciseId"),
            video_id=request.query_params.get("videoId"),
        )
        return Response(CommentSerializer(comments, many=True).data)

    def post(self, request):
        comment = CommentService().create_comment(
            request.user,
            program_id=request.data.get("programId"),
            text=request.data.get("text"),
            exercise_id=request.data.get("exerciseId"),
            video_id=request.data.get("videoId"),
            parent_id=request.data.get("parentId"),
        )
        return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)


class CommentDetailView(APIView):
    """Edit or delete a comment (author, program trainer or admin)."""
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        comment = CommentService().update_comment(request.user, pk, request.data.get("text"))
        return Response(CommentSerializer(comment).data)

    def delete(self, request, pk):
        CommentService().delete_comment(request.user, pk)
        return Response({"success": True})


# ============================================================
# RATINGS
# ============================================================

class RatingView(APIView):

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get(self, request):
        program_id = request.query_params.get("programId")
        if not program_id:
            raise ValidationError("programId required")

        summary = RatingService().summary(program_id)
        return Response({
            "average": summary["average"],
            "count": summary["count"],
            "recent": RatingSerializer(summary["recent"], many=True).data,
        })

    def post(self, request):
        rating, created = RatingService().rate(
            request.user,
            program_id=request.data.get("programId"),
            score=request.data.get("score"),
            review=request.data.get("review"),
        )
        return Response(
            RatingSerializer(rating).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )
