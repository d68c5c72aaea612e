"""FastAPI endpoints for the Customers domain."""

from fastapi import APIRouter
from protean.utils.globals import current_domain
from shared.api import ApiResponse, success

from customers.api.schemas import (
    AddAddressRequest,
    RegisterCustomerRequest,
    SuspendCustomerRequest,
    UpdateAddressRequest,
    UpdateProfileRequest,
)
from customers.customer.account import ReactivateCustomer, SuspendCustomer
from customers.customer.addresses import AddAddress, RemoveAddress, UpdateAddress
from customers.customer.customer import Customer
from customers.customer.profile import UpdateProfile
from customers.customer.registration import RegisterCustomer

router = APIRouter(prefix="/api/v1/customers", tags=["customers"])


def _address_data(address):
    return {
        "id": str(address.id),
        "first_name": address.first_name,
        "last_name": address.last_name,
        "company": address.company,
        "address_line_1": address.address_line_1,
        "address_line_2": address.address_line_2,
        "city": address.city,
        "state": address.state,
        "postal_code": address.postal_code,
        "country": address.country,
        "phone": address.phone,
        "is_default_shipping": address.is_default_shipping,
        "is_default_billing": address.is_default_billing,
    }


def _customer_data(customer):
    return {
        "id": str(customer.id),
        "email": customer.email.address,
        "first_name": customer.first_name,
        "last_name": customer.last_name,
        "full_name": customer.full_name,
        "phone": customer.phone,
        "status": customer.status,
        "addresses": [_address_data(a) for a in customer.addresses],
    }


@router.post("", status_code=201, response_model=ApiResponse)
async def register_customer(body: RegisterCustomerRequest) -> ApiResponse:
    command = RegisterCustomer(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
    )
    customer_id = current_domain.process(command, asynchronous=False)
    return success({"customer_id": customer_id}, "Customer registered")


@router.get("/{customer_id}", response_model=ApiResponse)
async def get_customer(customer_id: str) -> ApiResponse:
    customer = current_domain.repository_for(Customer).get(customer_id)
    return success(_customer_data(customer), "Customer retrieved")


@router.put("/{customer_id}", response_model=ApiResponse)
async def update_profile(customer_id: str, body: UpdateProfileRequest) -> ApiResponse:
    command = UpdateProfile(
        customer_id=customer_id,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
    )
    current_domain.process(command, asynchronous=False)
    return success(message="Profile updated")


@router.get("/{customer_id}/addresses", response_model=ApiResponse)
async def list_addresses(customer_id: str) -> ApiResponse:
    customer = current_domain.repository_for(Customer).get(customer_id)
    return success([_address_data(a) for a in customer.addresses], "Addresses retrieved")


@router.post("/{customer_id}/addresses", status_code=201, response_model=ApiResponse)
async def add_address(customer_id: str, body: AddAddressRequest) -> ApiResponse:
    command = AddAddress(customer_id=customer_id, **body.model_dump())
    address_id = current_domain.process(command, asynchronous=False)
    return success({"address_id": address_id}, "Address added")


@router.put("/{customer_id}/addresses/{address_id}", response_model=ApiResponse)
async def update_address(customer_id: str, address_id: str, body: UpdateAddressRequest) -> ApiResponse:
    command = UpdateAddress(customer_id=customer_id, address_id=address_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return success(message="Address updated")


@router.delete("/{customer_id}/addresses/{address_id}", response_model=ApiResponse)
async def remove_address(customer_id: str, address_id: str) -> ApiResponse:
    current_domain.process(RemoveAddress(customer_id=customer_id, address_id=address_id), asynchronous=False)
    return success(message="Address removed")


@router.put("/{customer_id}/suspend", response_model=ApiResponse)
async def suspend_customer(customer_id: str, body: SuspendCustomerRequest) -> ApiResponse:
    current_domain.process(SuspendCustomer(customer_id=customer_id, reason=body.reason), asynchronous=False)
    return success(message="Customer suspended")


@router.put("/{customer_id}/reactivate", response_model=ApiResponse)
async def reactivate_customer(customer_id: str) -> ApiResponse:
    current_domain.process(ReactivateCustomer(customer_id=customer_id), asynchronous=False)
    return success(message="Customer reactivated")
