from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("venues", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="venue",
            name="currency",
            field=models.CharField(
                choices=[("BRL", "BRL"), ("USD", "USD"), ("EUR", "EUR")],
                default="BRL",
                max_length=3,
            ),
        ),
    ]
