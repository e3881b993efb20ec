# 
from rest_framework import serializers
from .models import Store


class StoreMiniSerializer(serializers.ModelSerializer):
    class Meta:
        model = Store
        fields = ("id", "number")
