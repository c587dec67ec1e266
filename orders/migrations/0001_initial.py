import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='WeekCycle',
            fields=[
                ('id', models.CharField(help_text='ISO week, e.g. 2024-W01', max_length=10, primary_key=True, serialize=False)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('is_active', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['-start_date'],
            },
        ),
        migrations.CreateModel(
            name='OrderListItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uuid', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('item_id', models.PositiveIntegerField(db_index=True)),
                ('part_category', models.CharField(max_length=50)),
                ('quantity', models.PositiveIntegerField(blank=True, null=True)),
                ('status', models.CharField(choices=[('PENDING', 'Need to Order'), ('ORDERED', 'Ordered'), ('SHIPPING', 'Shipping'), ('RECEIVED', 'Received'), ('STOCK_ADDED', 'Stock Added')], db_index=True, default='PENDING', max_length=20)),
                ('added_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('added_by', models.CharField(blank=True, max_length=150, null=True)),
                ('ordered_at', models.DateTimeField(blank=True, null=True)),
                ('ordered_by', models.CharField(blank=True, max_length=150, null=True)),
                ('tracking_number', models.CharField(blank=True, max_length=100, null=True)),
                ('tracking_url', models.URLField(blank=True, max_length=500, null=True)),
                ('shipping_at', models.DateTimeField(blank=True, null=True)),
                ('received_at', models.DateTimeField(blank=True, null=True)),
                ('stock_added_at', models.DateTimeField(blank=True, null=True)),
                ('stock_added_by', models.CharField(blank=True, max_length=150, null=True)),
                ('stock_quantity_added', models.PositiveIntegerField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('week_cycle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='orders.weekcycle')),
            ],
            options={
                'ordering': ['-added_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='weekcycle',
            constraint=models.UniqueConstraint(condition=models.Q(('is_active', True)), fields=('is_active',), name='single_active_week_cycle'),
        ),
    ]
