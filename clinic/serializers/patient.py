from rest_framework import serializers

from clinic.services.text import clean_text as _clean


class PatientCreateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    dob = serializers.DateField(required=False, allow_null=True)
    gender = serializers.ChoiceField(choices=['Male', 'Female', 'Other'], required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    medical_history = serializers.CharField(required=False, allow_blank=True)

    def validate_first_name(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('first name is required')
        return v

    def validate_last_name(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('last name is required')
        return v

    def validate_phone(self, v):
        return _clean(v)

    def validate_medical_history(self, v):
        return _clean(v)


class PatientUpdateSerializer(PatientCreateSerializer):
    id = serializers.IntegerField(min_value=1)
    first_name = serializers.CharField(max_length=100, required=False)
    last_name = serializers.CharField(max_length=100, required=False)


class PatientListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, max_length=64)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)
