"""create users, categories and leave request tables"""
from alembic import op
import sqlalchemy as sa

revision = "0001_create_leave_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("nome", sa.String(length=100), nullable=False),
        sa.Column("cognome", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("ruolo", sa.String(length=20), nullable=False, server_default="Dipendente"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_cognome", "users", ["cognome"])

    op.create_table(
        "categorie",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("descrizione", sa.String(length=200), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_categorie"),
    )

    op.create_table(
        "richieste_permesso",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("utente_id", sa.Integer(), nullable=False),
        sa.Column("categoria_id", sa.Integer(), nullable=False),
        sa.Column("data_inizio", sa.Date(), nullable=False),
        sa.Column("data_fine", sa.Date(), nullable=False),
        sa.Column("motivazione", sa.String(length=500), nullable=True),
        sa.Column("stato", sa.String(length=20), nullable=False, server_default="In attesa"),
        sa.Column("data_richiesta", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("utente_valutazione_id", sa.Integer(), nullable=True),
        sa.Column("data_valutazione", sa.DateTime(), nullable=True),
        sa.CheckConstraint("data_fine >= data_inizio", name="ck_richieste_permesso_date_range"),
        sa.ForeignKeyConstraint(
            ["utente_id"],
            ["users.id"],
            name="fk_richieste_permesso_utente_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["categoria_id"],
            ["categorie.id"],
            name="fk_richieste_permesso_categoria_id_categorie",
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["utente_valutazione_id"],
            ["users.id"],
            name="fk_richieste_permesso_utente_valutazione_id_users",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_richieste_permesso"),
    )
    op.create_index("ix_richieste_permesso_utente_id", "richieste_permesso", ["utente_id"])
    op.create_index("ix_richieste_permesso_categoria_id", "richieste_permesso", ["categoria_id"])
    op.create_index("ix_richieste_permesso_stato", "richieste_permesso", ["stato"])
    op.create_index("ix_richieste_utente_stato", "richieste_permesso", ["utente_id", "stato"])


def downgrade() -> None:
    op.drop_index("ix_richieste_utente_stato", table_name="richieste_permesso")
    op.drop_index("ix_richieste_permesso_stato", table_name="richieste_permesso")
    op.drop_index("ix_richieste_permesso_categoria_id", table_name="richieste_permesso")
    op.drop_index("ix_richieste_permesso_utente_id", table_name="richieste_permesso")
    op.drop_table("richieste_permesso")
    op.drop_table("categorie")
    op.drop_index("ix_users_cognome", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
