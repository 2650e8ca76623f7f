from rest_framework.permissions import SAFE_METHODS, BasePermission

class IsAdmin(BasePermission):
    def has_permission(self, request, view):
        u = request.user
        if not u or not u.is_authenticated: return False
        return u.is_staff or u.is_superuser

class IsAdminOrReadOnly(IsAdmin):
    """
    Anyone may read ledger data; only admins may change it.
    """
    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return super().has_permission(request, view)
