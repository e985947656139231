from rest_framework import serializers

from clinic.models import User
from clinic.services.text import clean_text


class StaffCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    full_name = serializers.CharField(max_length=150)
    role = serializers.ChoiceField(choices=[r for r, _ in User.ROLE_CHOICES])

    def validate_full_name(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('full name is required')
        return v


class UserTargetSerializer(serializers.Serializer):
    userId = serializers.IntegerField(min_value=1)
