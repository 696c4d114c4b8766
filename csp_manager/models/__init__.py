"""
Modelos da aplicação.

`policy` contém os snapshots imutáveis de política; `policy_option` e `user`
são tabelas do SQLAlchemy e devem ser importados antes de `create_all()`.
"""
