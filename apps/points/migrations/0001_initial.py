import uuid
from decimal import Decimal
import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('restaurants', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PointsBalance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('account_id', models.CharField(max_length=64)),
                ('points', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('restaurant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='balances', to='restaurants.restaurant')),
            ],
            options={
                'db_table': 'points_balances',
                'ordering': ['account_id', 'restaurant_id'],
                'constraints': [
                    models.UniqueConstraint(fields=('account_id', 'restaurant'), name='points_balance_unique_account_restaurant'),
                    models.CheckConstraint(condition=models.Q(points__gte=0), name='points_balance_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TransferRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('from_user_id', models.CharField(max_length=64)),
                ('to_id', models.CharField(max_length=64)),
                ('to_kind', models.CharField(choices=[('user', 'User'), ('restaurant', 'Restaurant')], max_length=20)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('status', models.CharField(choices=[('committed', 'Committed'), ('failed', 'Failed')], max_length=20)),
                ('failure_reason', models.CharField(blank=True, max_length=50)),
                ('request_token', models.CharField(blank=True, max_length=128, null=True, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('restaurant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transfers', to='restaurants.restaurant')),
            ],
            options={
                'db_table': 'points_transfers',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['from_user_id', 'created_at'], name='points_tr_from_created_idx'),
                    models.Index(fields=['to_id', 'created_at'], name='points_tr_to_created_idx'),
                    models.Index(fields=['restaurant', 'created_at'], name='points_tr_rest_created_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(amount__gt=0), name='points_transfer_positive_amount'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Purchase',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('user_id', models.CharField(max_length=64)),
                ('receipt_code', models.CharField(max_length=128, unique=True)),
                ('items', models.JSONField(blank=True, default=list)),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('points', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('purchased_at', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('restaurant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='purchases', to='restaurants.restaurant')),
            ],
            options={
                'db_table': 'points_purchases',
                'ordering': ['-purchased_at', '-created_at'],
                'indexes': [
                    models.Index(fields=['user_id', 'purchased_at'], name='points_pu_user_date_idx'),
                ],
            },
        ),
    ]
