"""
Pacote de testes automatizados (pytest).

Contém testes unitários da geometria, da máquina de estados dos agentes,
do detector de contatos, da população e testes de integração do laço.

Para executar todos os testes:
    pytest tests/ -v
"""
