import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('projects', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.PositiveIntegerField(help_text='XAF')),
                ('phone_number', models.CharField(max_length=20)),
                ('provider', models.CharField(choices=[('mtn', 'MTN Mobile Money'), ('orange', 'Orange Money')], default='mtn', max_length=10)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('successful', 'Successful'), ('failed', 'Failed')], default='pending', max_length=20)),
                ('is_paying_all', models.BooleanField(default=False)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('first_name', models.CharField(blank=True, max_length=100)),
                ('last_name', models.CharField(blank=True, max_length=100)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('payment_url', models.URLField(blank=True, max_length=500)),
                ('gateway_reference', models.CharField(blank=True, db_index=True, max_length=100)),
                ('gateway_status', models.CharField(blank=True, max_length=30)),
                ('operator', models.CharField(blank=True, max_length=50)),
                ('operator_reference', models.CharField(blank=True, max_length=100)),
                ('final_amount', models.PositiveIntegerField(blank=True, null=True)),
                ('version', models.PositiveIntegerField(default=0)),
                ('reconciled_via', models.CharField(blank=True, choices=[('redirect', 'Return URL'), ('webhook', 'Webhook'), ('poll', 'Status poll')], max_length=10)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('failed_at', models.DateTimeField(blank=True, null=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payments_made', to=settings.AUTH_USER_MODEL)),
                ('developer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='payments_received', to=settings.AUTH_USER_MODEL)),
                ('milestones', models.ManyToManyField(blank=True, related_name='payments', to='projects.milestone')),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='projects.project')),
            ],
            options={
                'db_table': 'payments',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status', 'created_at'], name='payments_status_8b1c2d_idx')],
            },
        ),
    ]
