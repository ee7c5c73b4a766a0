from rest_framework import serializers

from .models import CashDrawerSession, LedgerEntry, Payout, ZReport


class CashDrawerSessionSerializer(serializers.ModelSerializer):
    class Meta:
        model = CashDrawerSession
        fields = [
            "id",
            "status",
            "opened_by",
            "closed_by",
            "opening_balance",
            "closing_actual_balance",
            "expected_balance",
            "variance",
            "notes",
            "opened_at",
            "closed_at",
        ]
        read_only_fields = fields


class LedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerEntry
        fields = [
            "id",
            "account",
            "transaction_type",
            "reference_type",
            "reference_id",
            "amount",
            "session",
            "driver",
            "description",
            "processed_by",
            "created_at",
        ]
        read_only_fields = fields


class PayoutSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payout
        fields = ["id", "session", "amount", "category", "notes", "processed_by", "created_at"]
        read_only_fields = ["id", "session", "processed_by", "created_at"]


class ZReportSerializer(serializers.ModelSerializer):
    class Meta:
        model = ZReport
        fields = [
            "id",
            "session",
            "opening_balance",
            "total_cash_sales",
            "total_payouts",
            "total_settlements",
            "total_floats",
            "expected_balance",
            "actual_balance",
            "variance",
            "breakdown",
            "closed_by",
            "created_at",
        ]
        read_only_fields = fields


class OpenSessionSerializer(serializers.Serializer):
    opening_balance = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CloseSessionSerializer(serializers.Serializer):
    actual_balance = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class RecordPayoutSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    category = serializers.ChoiceField(choices=Payout.Category.choices, default=Payout.Category.OTHER)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
