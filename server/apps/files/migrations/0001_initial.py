from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='File',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Display name, not used as a storage key', max_length=255)),
                ('size', models.BigIntegerField(blank=True, help_text='Content size in bytes', null=True)),
                ('storage_path', models.CharField(blank=True, help_text='Backend-relative key: files/<uuid>', max_length=255, null=True, unique=True)),
                ('mime_type', models.CharField(blank=True, help_text='MIME type sniffed from content via python-magic', max_length=255, null=True)),
                ('is_complete', models.BooleanField(default=False, help_text='Content uploaded and metadata fully populated')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'File',
                'verbose_name_plural': 'Files',
                'ordering': ['-created_at', '-id'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(models.Q(('is_complete', True), ('mime_type__isnull', False), ('size__isnull', False), ('storage_path__isnull', False)), models.Q(('is_complete', False), ('mime_type__isnull', True), ('size__isnull', True), ('storage_path__isnull', True)), _connector='OR'), name='files_complete_fields_consistent'),
                    models.CheckConstraint(condition=models.Q(('size__gte', 0), ('size__isnull', True), _connector='OR'), name='files_size_non_negative'),
                ],
            },
        ),
    ]
