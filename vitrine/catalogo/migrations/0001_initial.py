from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Produto',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome', models.CharField(max_length=255, verbose_name='Nome do Produto')),
                ('descricao', models.TextField(blank=True, verbose_name='Descrição')),
                ('preco', models.DecimalField(decimal_places=2, max_digits=10, verbose_name='Preço')),
                ('categoria', models.CharField(blank=True, max_length=100, verbose_name='Categoria')),
                ('imagens', models.JSONField(blank=True, default=list, verbose_name='Imagens')),
                ('tamanhos', models.JSONField(blank=True, default=list, verbose_name='Tamanhos')),
                ('cores', models.JSONField(blank=True, default=list, verbose_name='Cores')),
                ('em_estoque', models.BooleanField(default=True, verbose_name='Em Estoque')),
                ('data_criacao', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Produto',
                'verbose_name_plural': 'Produtos',
                'db_table': 'catalogo_produto',
                'ordering': ['nome'],
            },
        ),
    ]
