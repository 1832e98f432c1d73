import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalogo', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Pedido',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('data_pedido', models.DateTimeField(auto_now_add=True, verbose_name='Data do Pedido')),
                ('data_atualizacao', models.DateTimeField(auto_now=True, verbose_name='Última Atualização')),
                ('status', models.CharField(choices=[('Placed', 'Placed'), ('Processing', 'Processing'), ('Shipped', 'Shipped'), ('Out for delivery', 'Out for delivery'), ('Delivered', 'Delivered'), ('Cancelled', 'Cancelled')], default='Placed', max_length=20, verbose_name='Status')),
                ('valor_itens', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Valor dos Itens')),
                ('valor_imposto', models.DecimalField(decimal_places=4, max_digits=14, verbose_name='Imposto')),
                ('valor_frete', models.DecimalField(decimal_places=2, default=0, max_digits=10, verbose_name='Valor do Frete')),
                ('valor_total', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Total do Pedido')),
                ('metodo_pagamento', models.CharField(choices=[('stripe', 'Stripe'), ('paypal', 'PayPal'), ('razorpay', 'Razorpay'), ('cod', 'Pagamento na Entrega')], max_length=20, verbose_name='Método de Pagamento')),
                ('esta_pago', models.BooleanField(default=False, verbose_name='Pago')),
                ('pago_em', models.DateTimeField(blank=True, null=True, verbose_name='Pago em')),
                ('resultado_pagamento', models.JSONField(blank=True, null=True, verbose_name='Resultado do Pagamento')),
                ('esta_entregue', models.BooleanField(default=False, verbose_name='Entregue')),
                ('entregue_em', models.DateTimeField(blank=True, null=True, verbose_name='Entregue em')),
                ('endereco_entrega_json', models.JSONField(help_text='Cópia do endereço no momento do pedido', verbose_name='Endereço de Entrega (JSON)')),
                ('chave_idempotencia', models.CharField(blank=True, max_length=100, null=True, unique=True, verbose_name='Chave de Idempotência')),
                ('usuario', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='pedidos', to=settings.AUTH_USER_MODEL, verbose_name='Cliente')),
            ],
            options={
                'verbose_name': 'Pedido',
                'verbose_name_plural': 'Pedidos',
                'db_table': 'pedido_compra',
                'ordering': ['-data_pedido', '-id'],
            },
        ),
        migrations.CreateModel(
            name='ItemPedido',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome', models.CharField(max_length=255, verbose_name='Nome do Produto')),
                ('imagem', models.CharField(blank=True, default='', max_length=500, verbose_name='Imagem')),
                ('preco', models.DecimalField(decimal_places=2, max_digits=10, verbose_name='Preço Unitário na Compra')),
                ('quantidade', models.PositiveIntegerField(verbose_name='Quantidade')),
                ('tamanho', models.CharField(blank=True, default='', max_length=50)),
                ('cor', models.CharField(blank=True, default='', max_length=50)),
                ('subtotal', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Subtotal')),
                ('pedido', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='itens', to='pedidos.pedido')),
                ('produto', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='itens_pedido', to='catalogo.produto', verbose_name='Produto Original')),
            ],
            options={
                'verbose_name': 'Item do Pedido',
                'verbose_name_plural': 'Itens do Pedido',
                'db_table': 'pedido_item',
                'ordering': ['id'],
            },
        ),
    ]
