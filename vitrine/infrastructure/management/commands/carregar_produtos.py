from decimal import Decimal

from django.core.management.base import BaseCommand

from vitrine.catalogo.models import Produto


PRODUTOS = [
    {
        'nome': 'iPhone 15 Pro',
        'descricao': 'iPhone com design em titânio e chip A17 Pro.',
        'preco': Decimal('999.00'),
        'categoria': 'iPhone',
        'tamanhos': ['128GB', '256GB', '512GB', '1TB'],
        'cores': ['Natural Titanium', 'Blue Titanium', 'White Titanium', 'Black Titanium'],
    },
    {
        'nome': 'MacBook Air M3',
        'descricao': 'MacBook Air com chip M3.',
        'preco': Decimal('1099.00'),
        'categoria': 'Mac',
        'tamanhos': ['256GB', '512GB', '1TB', '2TB'],
        'cores': ['Midnight', 'Starlight', 'Silver', 'Space Gray'],
    },
    {
        'nome': 'iPad Pro',
        'descricao': 'iPad Pro com tela Liquid Retina XDR.',
        'preco': Decimal('799.00'),
        'categoria': 'iPad',
        'tamanhos': ['128GB', '256GB', '512GB', '1TB', '2TB'],
        'cores': ['Space Gray', 'Silver'],
    },
    {
        'nome': 'Apple Watch Series 9',
        'descricao': 'Relógio com chip S9 e tela mais brilhante.',
        'preco': Decimal('399.00'),
        'categoria': 'Watch',
        'tamanhos': ['41mm', '45mm'],
        'cores': ['Pink', 'Midnight', 'Starlight', 'Silver', 'Red'],
    },
    {
        'nome': 'AirPods Pro (2nd generation)',
        'descricao': 'Fones com cancelamento ativo de ruído.',
        'preco': Decimal('249.00'),
        'categoria': 'AirPods',
        'tamanhos': [],
        'cores': ['White'],
    },
]


class Command(BaseCommand):
    help = 'Carrega produtos de exemplo no catálogo'

    def add_arguments(self, parser):
        parser.add_argument(
            '--limpar', action='store_true',
            help='Remove os produtos existentes antes de carregar.',
        )

    def handle(self, *args, **options):
        if options['limpar']:
            removidos, _ = Produto.objects.all().delete()
            self.stdout.write(self.style.WARNING(f'{removidos} registro(s) removido(s).'))

        self.stdout.write('Carregando produtos...')
        for dados in PRODUTOS:
            produto, created = Produto.objects.get_or_create(
                nome=dados['nome'],
                defaults={campo: valor for campo, valor in dados.items() if campo != 'nome'},
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'Criado produto "{produto.nome}"'))
            else:
                self.stdout.write(f'Produto "{produto.nome}" já existe')

        self.stdout.write(self.style.SUCCESS('Catálogo carregado com sucesso!'))
