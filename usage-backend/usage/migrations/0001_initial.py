# Generated manually for the usage report models

from decimal import Decimal
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('stores', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='UsageEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('uploaded_at', models.DateTimeField(db_index=True)),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='usage_entries', to='stores.store')),
                ('uploaded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='usage_entries_uploaded', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Usage entry',
                'verbose_name_plural': 'Usage entries',
                'db_table': 'usage_entries',
                'ordering': ['-uploaded_at', '-id'],
                'indexes': [models.Index(fields=['store', 'uploaded_at'], name='usage_entry_store_upl_idx')],
            },
        ),
        migrations.CreateModel(
            name='UsageCategory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=120)),
                ('position', models.PositiveIntegerField(default=0, help_text='Order of the section in the report')),
                ('entry', models.ForeignKey(db_column='usage_entry_id', on_delete=django.db.models.deletion.CASCADE, related_name='categories', to='usage.usageentry')),
            ],
            options={
                'verbose_name': 'Usage category',
                'verbose_name_plural': 'Usage categories',
                'db_table': 'usage_categories',
                'ordering': ['position', 'id'],
            },
        ),
        migrations.CreateModel(
            name='UsageProduct',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product_number', models.CharField(db_index=True, max_length=20)),
                ('product_name', models.CharField(max_length=255)),
                ('unit', models.CharField(max_length=10)),
                ('w1', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('w2', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('w3', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('w4', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('average', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('conversion', models.DecimalField(blank=True, decimal_places=2, default=Decimal('1'), help_text='Units per case, from the conversion table', max_digits=10, null=True)),
                ('position', models.PositiveIntegerField(default=0)),
                ('category', models.ForeignKey(db_column='usage_category_id', on_delete=django.db.models.deletion.CASCADE, related_name='products', to='usage.usagecategory')),
            ],
            options={
                'verbose_name': 'Usage product',
                'verbose_name_plural': 'Usage products',
                'db_table': 'usage_products',
                'ordering': ['position', 'id'],
            },
        ),
    ]
