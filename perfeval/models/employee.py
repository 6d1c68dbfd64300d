from sqlalchemy import Column, Integer, String, ForeignKey
from perfeval.core.database import Base


class Employee(Base):
    """
    Directory entry for an employee.

    user_id links the employee to a login account (optional);
    manager_id points at another employee.
    """
    __tablename__ = "employees"

    employee_id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    manager_id = Column(Integer, ForeignKey("employees.employee_id"), nullable=True, index=True)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Employee(employee_id={self.employee_id}, name='{self.display_name}')>"
