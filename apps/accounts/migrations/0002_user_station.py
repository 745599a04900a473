# Generated manually: users and stations reference each other, so the
# station link is added once the stations table exists.

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        ('accounts', '0001_initial'),
        ('stations', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='user',
            name='station',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='staff', to='stations.station'),
        ),
        migrations.AddIndex(
            model_name='user',
            index=models.Index(fields=['station', 'role'], name='users_station_role_idx'),
        ),
    ]
