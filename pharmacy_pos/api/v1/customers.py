from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from pharmacy_pos.database import get_db
from pharmacy_pos.config import settings
from pharmacy_pos.core.exceptions import CustomerNotFound, DuplicateRecord
from pharmacy_pos.repositories.catalog_repository import CustomerRepository
from pharmacy_pos.schemas.customer import CustomerCreate, CustomerResponse
from pharmacy_pos.schemas.pagination import PaginatedResponse

router_customers = APIRouter()


@router_customers.get("/", response_model=PaginatedResponse[CustomerResponse])
async def list_customers(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    customers, total = await CustomerRepository(db).list(page, page_size)
    return PaginatedResponse[CustomerResponse].build(
        [CustomerResponse.model_validate(c) for c in customers], total, page, page_size
    )


@router_customers.post("/", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(customer_data: CustomerCreate, db: AsyncSession = Depends(get_db)):
    repo = CustomerRepository(db)
    if await repo.get_by_phone(customer_data.phone):
        raise DuplicateRecord("Customer with this phone number already exists")
    customer = await repo.create(customer_data)
    return CustomerResponse.model_validate(customer)


@router_customers.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: str, db: AsyncSession = Depends(get_db)):
    customer = await CustomerRepository(db).get_by_id(customer_id)
    if not customer:
        raise CustomerNotFound(customer_id)
    return CustomerResponse.model_validate(customer)
