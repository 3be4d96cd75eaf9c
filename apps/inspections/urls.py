from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import InspectionViewSet, agent_earnings

router = SimpleRouter(trailing_slash=False)
router.register(r"inspections", InspectionViewSet, basename="inspection")

urlpatterns = [
    path("agents/earnings", agent_earnings, name="agent-earnings"),
    path("", include(router.urls)),
]
