"""Django admin configuration for projects app."""

from django.contrib import admin

from server.apps.projects.models import Project, Version, VersionFile


class VersionInline(admin.TabularInline):
    """Versions listed on the project page."""

    model = Version
    fields = ['name', 'description', 'created_at']
    readonly_fields = ['created_at']
    extra = 0


class VersionFileInline(admin.TabularInline):
    """Attached files listed on the version page."""

    model = VersionFile
    fields = ['file', 'attached_at']
    readonly_fields = ['attached_at']
    raw_id_fields = ['file']
    extra = 0


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    """Admin interface for Project model."""

    list_display = ['slug', 'name', 'created_at']
    search_fields = ['slug', 'name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [VersionInline]


@admin.register(Version)
class VersionAdmin(admin.ModelAdmin):
    """Admin interface for Version model."""

    list_display = ['name', 'project', 'created_at']
    list_filter = ['project']
    search_fields = ['name', 'project__slug']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [VersionFileInline]
