# community/api/serializers.py

from rest_framework import serializers

from community.models import Comment, Rating


class AuthorSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    image = serializers.CharField()


class ReplySerializer(serializers.ModelSerializer):
    user = AuthorSerializer(read_only=True)

    class Meta:
        model = Comment
        fields = ["id", "user", "text", "parent", "created_at", "updated_at"]


class CommentSerializer(serializers.ModelSerializer):
    user = AuthorSerializer(read_only=True)
    replies = serializers.SerializerMethodField()

    class Meta:
        model = Comment
        fields = [
            "id",
            "user",
            "program",
            "exercise",
            "video",
            "parent",
            "text",
            "replies",
            "created_at",
            "updated_at",
        ]

    def get_replies(self, obj):
        replies = obj.replies.select_related("user").order_by("created_at")
        return ReplySerializer(replies, many=True).data


class RatingSerializer(serializers.ModelSerializer):
    user = AuthorSerializer(read_only=True)

    class Meta:
        model = Rating
        fields = ["id", "user", "program", "score", "review", "created_at", "updated_at"]
