from typing import Annotated
from fastapi import Depends
from facturacion.modules.auth.dependencies import get_current_principal, require_roles
from facturacion.modules.auth.schemas import Principal, Role

principal_dependency = Annotated[Principal, Depends(get_current_principal)]

# Role gates used by the routers
any_role = require_roles(Role.BILLER, Role.MANAGER, Role.ADMIN)
manager_or_admin = require_roles(Role.MANAGER, Role.ADMIN)
admin_only = require_roles(Role.ADMIN)
