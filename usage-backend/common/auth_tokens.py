from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework import exceptions
from common.permissions import accessible_stores, user_role
from common.roles import UserStatus


class RoleAwareTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Accepts username and password.
    Embeds the user's role and reachable store ids in the resulting tokens.
    """

    def validate(self, attrs):
        # Let SimpleJWT authenticate the user (sets self.user)
        data = super().validate(attrs)

        profile = getattr(self.user, "profile", None)
        if profile is not None and profile.status != UserStatus.ACTIVE and not self.user.is_superuser:
            raise exceptions.AuthenticationFailed("User account is inactive")

        role = user_role(self.user)
        store_ids = list(accessible_stores(self.user).values_list("id", flat=True))

        # Build fresh tokens WITH custom claims (ignore the ones created by super())
        refresh = self.get_token(self.user)
        refresh["role"] = role
        refresh["store_ids"] = store_ids

        data["refresh"] = str(refresh)
        data["access"] = str(refresh.access_token)
        data["role"] = role
        data["store_ids"] = store_ids
        return data
