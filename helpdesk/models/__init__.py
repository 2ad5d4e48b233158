from helpdesk.models.tenant import Tenant
from helpdesk.models.user import User
from helpdesk.models.ticket import Ticket
from helpdesk.models.user_session import UserSession
