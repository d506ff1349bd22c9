# programs/admin.py

from django.contrib import admin
from django.db.models import Count
from .models import Program, Workout, Exercise, Video, CoursePart, CourseSection, Enrollment, Favorite


class WorkoutInline(admin.TabularInline):
    model = Workout
    extra = 0
    fields = ['title', 'day', 'order']


class CoursePartInline(admin.TabularInline):
    model = CoursePart
    extra = 0
    fields = ['name', 'order']


@admin.register(Program)
class ProgramAdmin(admin.ModelAdmin):
    list_display = [
        'id_short',
        'title',
        'trainer',
        'level',
        'duration',
        'published',
        'total_enrollments',
        'created_at',
    ]
    list_filter = ['published', 'level', 'created_at']
    search_fields = ['title', 'trainer__email', 'trainer__name']
    readonly_fields = ['id', 'created_at', 'updated_at']
    ordering = ['-created_at']
    inlines = [WorkoutInline, CoursePartInline]

    fieldsets = (
        ('Basic Info', {
            'fields': ('id', 'trainer', 'title', 'description')
        }),
        ('Classification', {
            'fields': ('level', 'duration', 'image_url')
        }),
        ('Status', {
            'fields': ('published',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.annotate(total_enrollments_count=Count('enrollments'))

    @admin.display(description='ID')
    def id_short(self, obj):
        return str(obj.id)[:8]

    @admin.display(description='Enrollments', ordering='total_enrollments_count')
    def total_enrollments(self, obj):
        return obj.total_enrollments_count or 0


@admin.register(Exercise)
class ExerciseAdmin(admin.ModelAdmin):
    list_display = ['name', 'workout', 'sets', 'reps', 'order']
    search_fields = ['name', 'workout__title', 'workout__program__title']
    ordering = ['workout', 'order']


@admin.register(Video)
class VideoAdmin(admin.ModelAdmin):
    list_display = ['title', 'program', 'uploaded_by', 'created_at']
    search_fields = ['title', 'program__title']
    ordering = ['-created_at']


@admin.register(CourseSection)
class CourseSectionAdmin(admin.ModelAdmin):
    list_display = ['title', 'part', 'media_type', 'order']
    list_filter = ['media_type']
    ordering = ['part', 'order']


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ['user', 'program', 'active', 'start_date']
    list_filter = ['active', 'start_date']
    search_fields = ['user__email', 'program__title']
    ordering = ['-start_date']


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ['user', 'program', 'created_at']
    search_fields = ['user__email', 'program__title']
    ordering = ['-created_at']
