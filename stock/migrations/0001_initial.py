import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='StockItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uuid', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('item_id', models.PositiveIntegerField(db_index=True)),
                ('part_category', models.CharField(max_length=50)),
                ('quantity', models.PositiveIntegerField(default=0)),
                ('low_stock_threshold', models.PositiveIntegerField(default=5)),
                ('notes', models.TextField(blank=True, null=True)),
                ('tracking_number', models.CharField(blank=True, max_length=100, null=True)),
                ('last_updated', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_by', models.CharField(blank=True, max_length=150, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['-last_updated'],
            },
        ),
        migrations.CreateModel(
            name='DailyReportSummary',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('report_date', models.DateField(unique=True)),
                ('total_transactions', models.PositiveIntegerField(default=0)),
                ('total_added', models.PositiveIntegerField(default=0)),
                ('total_subtracted', models.PositiveIntegerField(default=0)),
                ('total_set', models.PositiveIntegerField(default=0)),
                ('unique_items', models.PositiveIntegerField(default=0)),
                ('unique_part_categories', models.PositiveIntegerField(default=0)),
                ('by_source', models.JSONField(blank=True, default=dict)),
                ('by_type', models.JSONField(blank=True, default=dict)),
                ('generated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'daily report summaries',
                'ordering': ['-report_date'],
            },
        ),
        migrations.CreateModel(
            name='StockTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uuid', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('item_id', models.PositiveIntegerField()),
                ('part_category', models.CharField(max_length=50)),
                ('quantity', models.PositiveIntegerField()),
                ('quantity_before', models.PositiveIntegerField()),
                ('quantity_after', models.PositiveIntegerField()),
                ('transaction_type', models.CharField(choices=[('SET', 'Set'), ('ADD', 'Add'), ('SUBTRACT', 'Subtract')], db_index=True, max_length=10)),
                ('source', models.CharField(choices=[('QUICK_ADD', 'Quick Add'), ('UPDATE_MODAL', 'Update'), ('BULK_ENTRY', 'Bulk'), ('ORDER_RECEIVED', 'Order'), ('MANUAL', 'Manual')], db_index=True, default='MANUAL', max_length=20)),
                ('tracking_number', models.CharField(blank=True, max_length=100, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('created_by', models.CharField(blank=True, max_length=150, null=True)),
                ('stock', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='stock.stockitem')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.AddConstraint(
            model_name='stockitem',
            constraint=models.UniqueConstraint(fields=('item_id', 'part_category'), name='unique_stock_key'),
        ),
        migrations.AddIndex(
            model_name='stocktransaction',
            index=models.Index(fields=['item_id', 'part_category', 'created_at'], name='stock_txn_key_created_idx'),
        ),
    ]
