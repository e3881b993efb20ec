# common/auth_views.py
from rest_framework_simplejwt.views import TokenObtainPairView
from .auth_tokens import RoleAwareTokenObtainPairSerializer


class RoleAwareTokenObtainPairView(TokenObtainPairView):
    serializer_class = RoleAwareTokenObtainPairSerializer
