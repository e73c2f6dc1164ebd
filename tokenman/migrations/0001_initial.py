"""
Initial migration for Tokenman models.
"""

import datetime
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Tokenman models: Region, Store, Product, margins, Token."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Region',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(help_text='Sigla do estado (ex: RS, SC, PR)', max_length=2, unique=True, verbose_name='UF')),
                ('name', models.CharField(max_length=100, verbose_name='Nome')),
                ('is_active', models.BooleanField(default=True, help_text='Se False, nenhuma loja do estado pode solicitar token.', verbose_name='Ativo')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Estado',
                'verbose_name_plural': 'Estados',
                'ordering': ['code'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.PositiveIntegerField(unique=True, verbose_name='Código do Produto')),
                ('name', models.CharField(max_length=200, verbose_name='Produto')),
                ('ncm', models.CharField(blank=True, default='', max_length=10, verbose_name='NCM')),
                ('subgroup_code', models.PositiveIntegerField(blank=True, db_index=True, null=True, verbose_name='Subgrupo')),
                ('federal_tax_rate', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=7, verbose_name='PIS/COFINS (%)')),
                ('requires_authorization', models.BooleanField(default=False, help_text='Desconto depende de aprovação fora do sistema.', verbose_name='Possui Alçada')),
                ('stocked_out', models.BooleanField(default=False, verbose_name='Ruptura')),
                ('pricing_blocked', models.BooleanField(default=False, verbose_name='Bloqueado pelo Pricing')),
                ('note', models.TextField(blank=True, default='', verbose_name='Observação')),
            ],
            options={
                'verbose_name': 'Produto',
                'verbose_name_plural': 'Produtos',
                'ordering': ['code'],
            },
        ),
        migrations.CreateModel(
            name='Store',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.PositiveIntegerField(unique=True, verbose_name='Código da Loja')),
                ('name', models.CharField(max_length=150, verbose_name='Loja')),
                ('city', models.CharField(blank=True, default='', max_length=100, verbose_name='Cidade')),
                ('microregion', models.CharField(blank=True, default='', max_length=100, verbose_name='Microrregião')),
                ('meets_discount_target', models.BooleanField(default=True, verbose_name='Meta de Desconto Regular')),
                ('earnings_compliant', models.BooleanField(default=True, verbose_name='DRE Regular')),
                ('tokens_enabled', models.BooleanField(default=True, verbose_name='Token Ativo')),
                ('token_quota', models.PositiveIntegerField(default=0, verbose_name='Tokens Disponíveis')),
                ('region', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stores', to='tokenman.region', verbose_name='Estado')),
            ],
            options={
                'verbose_name': 'Loja',
                'verbose_name_plural': 'Lojas',
                'ordering': ['code'],
            },
        ),
        migrations.CreateModel(
            name='ProductRegionPrice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('cost', models.DecimalField(decimal_places=4, max_digits=12, verbose_name='CMG')),
                ('consumer_price', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='PMC')),
                ('tax_rate', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=7, verbose_name='Alíquota (%)')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='region_prices', to='tokenman.product', verbose_name='Produto')),
                ('region', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='product_prices', to='tokenman.region', verbose_name='Estado')),
            ],
            options={
                'verbose_name': 'Preço Regional',
                'verbose_name_plural': 'Preços Regionais',
                'constraints': [
                    models.UniqueConstraint(fields=('product', 'region'), name='unique_product_region_price'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ProductMargin',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('scope', models.CharField(choices=[('region', 'Estado'), ('store', 'Loja')], default='region', max_length=10, verbose_name='Tipo de Aplicação')),
                ('kind', models.CharField(choices=[('percentage', 'Percentual'), ('absolute', 'Valor Fixo')], default='percentage', max_length=10, verbose_name='Tipo de Margem')),
                ('margin', models.DecimalField(decimal_places=4, help_text='Percentual mínimo de margem UF, ou preço mínimo (R$) se valor fixo.', max_digits=12, verbose_name='Margem')),
                ('additional_margin', models.DecimalField(blank=True, decimal_places=4, max_digits=7, null=True, verbose_name='Margem Adicional')),
                ('discount', models.DecimalField(blank=True, decimal_places=4, max_digits=7, null=True, verbose_name='Desconto')),
                ('starts_on', models.DateField(default=datetime.date.today, verbose_name='Data Início')),
                ('ends_on', models.DateField(verbose_name='Data Fim')),
                ('is_active', models.BooleanField(default=True, verbose_name='Ativo')),
                ('note', models.TextField(blank=True, default='', verbose_name='Observação')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='margins', to='tokenman.product', verbose_name='Produto')),
                ('region', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='product_margins', to='tokenman.region', verbose_name='Estado')),
                ('store', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='product_margins', to='tokenman.store', verbose_name='Loja')),
            ],
            options={
                'verbose_name': 'Margem do Produto',
                'verbose_name_plural': 'Margens do Produto',
                'indexes': [
                    models.Index(fields=['product', 'scope'], name='tokenman_pm_product_scope_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=(
                            models.Q(('region__isnull', False), ('scope', 'region'), ('store__isnull', True))
                            | models.Q(('region__isnull', True), ('scope', 'store'), ('store__isnull', False))
                        ),
                        name='product_margin_scope_target',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='SubgroupMargin',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('subgroup_code', models.PositiveIntegerField(db_index=True, verbose_name='Código do Subgrupo')),
                ('subgroup_name', models.CharField(max_length=150, verbose_name='Subgrupo')),
                ('margin', models.DecimalField(decimal_places=4, max_digits=7, verbose_name='Margem (%)')),
                ('additional_margin', models.DecimalField(blank=True, decimal_places=4, max_digits=7, null=True, verbose_name='Margem Adicional')),
                ('discount', models.DecimalField(blank=True, decimal_places=4, max_digits=7, null=True, verbose_name='Desconto')),
                ('starts_on', models.DateField(blank=True, null=True, verbose_name='Data Início')),
                ('ends_on', models.DateField(blank=True, null=True, verbose_name='Data Fim')),
                ('is_active', models.BooleanField(default=True, verbose_name='Ativo')),
                ('note', models.TextField(blank=True, default='', verbose_name='Observação')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('region', models.ForeignKey(blank=True, help_text='Vazio = todos os estados', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='subgroup_margins', to='tokenman.region', verbose_name='Estado')),
            ],
            options={
                'verbose_name': 'Margem do Subgrupo',
                'verbose_name_plural': 'Margens do Subgrupo',
                'ordering': ['subgroup_code'],
            },
        ),
        migrations.CreateModel(
            name='Token',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=32, unique=True, verbose_name='Código do Token')),
                ('status', models.CharField(choices=[('pending', 'Pendente'), ('approved', 'Aprovado'), ('rejected', 'Rejeitado')], db_index=True, default='pending', max_length=10, verbose_name='Status')),
                ('customer_identified', models.BooleanField(default=False, verbose_name='Cliente Identificado')),
                ('quota_debited', models.BooleanField(default=False, verbose_name='Token Debitado')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Data Criação')),
                ('validated_at', models.DateTimeField(blank=True, db_index=True, null=True, verbose_name='Data Validação')),
                ('decision_note', models.TextField(blank=True, default='', verbose_name='Observação da Validação')),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='tokens', to='tokenman.store', verbose_name='Loja')),
                ('validated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Validado por')),
            ],
            options={
                'verbose_name': 'Token',
                'verbose_name_plural': 'Tokens',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['store', 'status'], name='tokenman_token_store_st_idx'),
                    models.Index(fields=['status', 'validated_at'], name='tokenman_token_st_valid_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TokenItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_label', models.CharField(max_length=255, verbose_name='Produto')),
                ('quantity', models.PositiveIntegerField(default=1, verbose_name='Qtde Solicitada')),
                ('regular_price', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Preço Regular')),
                ('requested_price', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Valor Solicitado')),
                ('discount', models.DecimalField(decimal_places=2, max_digits=7, verbose_name='Desconto (%)')),
                ('cost', models.DecimalField(decimal_places=4, max_digits=12, verbose_name='CMG')),
                ('tax_rate', models.DecimalField(decimal_places=4, max_digits=7, verbose_name='Alíquota UF (%)')),
                ('federal_tax_rate', models.DecimalField(decimal_places=4, max_digits=7, verbose_name='PIS/COFINS (%)')),
                ('minimum_price', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Preço Mínimo')),
                ('uf_margin', models.DecimalField(decimal_places=4, max_digits=9, verbose_name='Margem UF (%)')),
                ('ceiling_value', models.DecimalField(blank=True, decimal_places=4, max_digits=12, null=True, verbose_name='Margem ZVDC')),
                ('ceiling_kind', models.CharField(blank=True, choices=[('percentage', 'Percentual'), ('absolute', 'Valor Fixo')], default='', max_length=10, verbose_name='Tipo da Margem ZVDC')),
                ('ceiling_source', models.CharField(choices=[('product', 'Margem do Produto'), ('subgroup', 'Margem do Subgrupo'), ('none', 'Sem Margem')], default='none', max_length=10, verbose_name='Origem da Margem ZVDC')),
                ('authorization_label', models.CharField(max_length=20, verbose_name='Desconto Alçada')),
                ('note', models.TextField(blank=True, default='', verbose_name='Observação')),
                ('product', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='token_items', to='tokenman.product', verbose_name='Produto')),
                ('token', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='item', to='tokenman.token', verbose_name='Token')),
            ],
            options={
                'verbose_name': 'Detalhe do Token',
                'verbose_name_plural': 'Detalhes do Token',
            },
        ),
    ]
