"""Create database schema and seed funnel stages and sample leads for development."""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from imobflow.db.session import SessionLocal, engine
from imobflow.models.activity import ActivityType, LeadActivity
from imobflow.models.base import Base
from imobflow.models.lead import Lead
from imobflow.models.lead_status import LeadStatus

STATUSES = [
	{"id": "status-novo", "name": "Novo", "color": "#3b82f6", "order_num": 1},
	{"id": "status-atendimento", "name": "Em Atendimento", "color": "#f97316", "order_num": 2},
	{"id": "status-proposta", "name": "Proposta Enviada", "color": "#8b5cf6", "order_num": 3},
	{"id": "status-negociacao", "name": "Negociação", "color": "#eab308", "order_num": 4},
	{"id": "status-vendido", "name": "Vendido", "color": "#22c55e", "order_num": 5},
	{"id": "status-perdido", "name": "Perdido", "color": "#ef4444", "order_num": 6},
]


LEADS = [
	{
		"id": "lead-joao",
		"name": "João Silva",
		"phone": "(11) 98765-4321",
		"email": "joao.silva@exemplo.com",
		"message": "Interessado em apartamentos de 2 quartos",
		"status_id": "status-novo",
		"age_days": 0,
	},
	{
		"id": "lead-maria",
		"name": "Maria Oliveira",
		"phone": "(21) 91234-5678",
		"email": "maria.oliveira@exemplo.com",
		"message": "Deseja marcar visita para o final de semana",
		"status_id": "status-atendimento",
		"age_days": 2,
	},
	{
		"id": "lead-carlos",
		"name": "Carlos Pereira",
		"phone": "(31) 99876-5432",
		"email": "carlos@exemplo.com",
		"message": "Enviar proposta até sexta-feira",
		"status_id": "status-proposta",
		"age_days": 5,
	},
	{
		"id": "lead-ana",
		"name": "Ana Santos",
		"phone": "(41) 98765-1234",
		"email": "ana.santos@exemplo.com",
		"message": "Fechado com sucesso!",
		"status_id": "status-vendido",
		"age_days": 30,
	},
	{
		"id": "lead-pedro",
		"name": "Pedro Costa",
		"phone": "(51) 98765-8765",
		"email": "pedro@exemplo.com",
		"message": "Cliente desistiu da compra",
		"status_id": "status-perdido",
		"age_days": 45,
	},
]


async def create_schema() -> None:
	"""Create the database schema if it does not already exist."""

	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)


async def seed_statuses() -> None:
	"""Insert or update the default sales funnel."""

	now = datetime.now(timezone.utc)
	async with SessionLocal() as session:
		async with session.begin():
			for status_data in STATUSES:
				status = await session.get(LeadStatus, status_data["id"])
				if status is None:
					session.add(LeadStatus(created_at=now, updated_at=now, **status_data))
				else:
					status.name = status_data["name"]
					status.color = status_data["color"]
					status.order_num = status_data["order_num"]
					status.updated_at = now


async def seed_leads() -> None:
	"""Insert demo leads for development flows."""

	now = datetime.now(timezone.utc)
	async with SessionLocal() as session:
		async with session.begin():
			for lead_data in LEADS:
				lead = await session.get(Lead, lead_data["id"])
				if lead is not None:
					continue
				created_at = now - timedelta(days=lead_data["age_days"])
				session.add(
					Lead(
						id=lead_data["id"],
						name=lead_data["name"],
						phone=lead_data["phone"],
						email=lead_data["email"],
						message=lead_data["message"],
						source="seed",
						status_id=lead_data["status_id"],
						created_at=created_at,
						updated_at=created_at,
						status_updated_at=created_at,
					)
				)
				session.add(
					LeadActivity(
						lead_id=lead_data["id"],
						type=ActivityType.LEAD_CREATED,
						description="Lead importado dos dados de exemplo.",
						created_at=created_at,
					)
				)


async def main() -> None:
	await create_schema()
	await seed_statuses()
	await seed_leads()
	print("Database schema ensured and demo data seeded.")


if __name__ == "__main__":
	asyncio.run(main())
