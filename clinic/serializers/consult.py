from rest_framework import serializers


class AttendSerializer(serializers.Serializer):
    entryId = serializers.IntegerField(min_value=1)


class ConsultFinishSerializer(serializers.Serializer):
    consultationId = serializers.IntegerField(min_value=1)
    diagnosis = serializers.CharField(max_length=4000, allow_blank=True)
    notes = serializers.CharField(max_length=8000, required=False, allow_blank=True, default='')


class PrescriptionSerializer(serializers.Serializer):
    consultationId = serializers.IntegerField(min_value=1)
    medication_name = serializers.CharField(max_length=200)
    dosage = serializers.CharField(max_length=100)
    frequency = serializers.CharField(max_length=100)
    duration = serializers.CharField(max_length=100)


class ConsultListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False)
    pageSize = serializers.IntegerField(min_value=1, max_value=100, required=False)


class QueueCancelSerializer(serializers.Serializer):
    entryId = serializers.IntegerField(min_value=1)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)
