from django.urls import path
from .views import images, delete_image

urlpatterns = [
    path("images", images, name="upload-images"),
    path("images/<uuid:pk>", delete_image, name="delete-image"),
]
