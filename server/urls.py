"""Root URL configuration."""

from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from server.apps.files.views import FileViewSet
from server.apps.projects.views import ProjectViewSet, VersionViewSet

router = DefaultRouter()
router.register('files', FileViewSet, basename='file')
router.register('projects', ProjectViewSet, basename='project')
router.register('versions', VersionViewSet, basename='version')

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include(router.urls)),
]
