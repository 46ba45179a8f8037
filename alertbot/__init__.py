"""Bot de alertas: recebe alertas via HTTP e publica nos canais do Discord.

Este pacote contém:
- constants: variáveis de ambiente e tabelas de configuração
- utils: helpers de data/hora
- errors: taxonomia de erros e classificação dos códigos do Discord
- discord_client: sessão REST autenticada com o Discord (token de bot)
- schemas: validação do corpo das requisições
- formatters: tradução do payload de alerta para mensagem do Discord
- services: resolução de canal e reações por severidade
- controller: criação do Flask app e endpoints
"""
