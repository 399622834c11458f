#!/usr/bin/env python3
"""
Database Seed Script
Put ticket types on sale for a demo event

Features:
1. Create ticket types - Standard, VIP and Backstage for SEED_EVENT_ID
2. Print availability so the seeded stock can be checked at a glance

Notes:
- SEED_EVENT_ID is fixed so manual API calls can be copy-pasted
- Capacity scales with the SEATS environment variable (default 500)
"""

import asyncio
from dataclasses import dataclass
import os
from uuid import UUID

from src.platform.config.di import container
from src.service.purchasing.app.command.create_ticket_type_use_case import (
    CreateTicketTypeUseCase,
)
from src.service.purchasing.app.query.get_ticket_availability_use_case import (
    GetTicketAvailabilityUseCase,
)


SEED_EVENT_ID = UUID('00000000-0000-0000-0000-000000000001')


@dataclass
class TicketTypeConfig:
    """Ticket type seed configuration"""

    name: str
    price: int
    capacity_share: float  # fraction of SEATS


TICKET_TYPES = [
    TicketTypeConfig(name='Standard', price=10, capacity_share=0.8),
    TicketTypeConfig(name='VIP', price=25, capacity_share=0.18),
    TicketTypeConfig(name='Backstage', price=100, capacity_share=0.02),
]


def _total_seats() -> int:
    seats = os.getenv('SEATS', '500')
    try:
        return max(1, int(seats))
    except ValueError:
        print(f'⚠️  SEATS={seats} is not a number, using 500')
        return 500


async def create_ticket_types(total_seats: int) -> None:
    print(f'🎫 Creating {len(TICKET_TYPES)} ticket types for event {SEED_EVENT_ID}...')
    use_case = CreateTicketTypeUseCase(uow_factory=container.uow_factory)

    for config in TICKET_TYPES:
        ticket_type = await use_case.execute(
            event_id=SEED_EVENT_ID,
            name=config.name,
            price=config.price,
            total_capacity=max(1, int(total_seats * config.capacity_share)),
        )
        print(
            f'   ✅ {ticket_type.name}: ID={ticket_type.id}, '
            f'{ticket_type.total_capacity} x {ticket_type.price}'
        )


async def verify_data() -> None:
    print('🔍 Verifying seeded data...')
    use_case = GetTicketAvailabilityUseCase(uow_factory=container.uow_factory)
    for row in await use_case.execute(event_id=SEED_EVENT_ID):
        print(f'   {row.name}: {row.quantity_available}/{row.total_capacity} available')


async def main() -> None:
    print('🌱 Starting data seeding...')
    print('=' * 50)

    database = container.database()
    try:
        await database.create_tables()
        await create_ticket_types(_total_seats())
        print()
        await verify_data()
    except Exception as e:
        print(f'❌ Seeding failed: {e}')
        raise SystemExit(1) from e
    finally:
        await database.dispose()

    print()
    print('=' * 50)
    print('🌱 Data seeding completed!')
    print(f'📋 Event: {SEED_EVENT_ID}')


if __name__ == '__main__':
    asyncio.run(main())
