"""Admin forms and model registrations for user and profile models.

Contains ModelAdmin and form classes to manage CustomUser and Profile in the
Django admin.
"""

from django import forms
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.contrib.auth.forms import ReadOnlyPasswordHashField
from django.utils.translation import gettext_lazy as _

from ..models.models_auth import CustomUser, Profile

# Branding for the site admin
admin.site.site_header = "Academy LMS Admin"
admin.site.site_title = "Academy LMS Portal"
admin.site.index_title = "Welcome to Academy LMS Admin"


# -----------------------------
# User Forms
# -----------------------------
class CustomUserCreationForm(forms.ModelForm):
    password1 = forms.CharField(label="Password", widget=forms.PasswordInput)
    password2 = forms.CharField(label="Password confirmation", widget=forms.PasswordInput)

    class Meta:
        model = CustomUser
        fields = ("email", "first_name", "last_name", "phone", "role", "is_approved", "is_enabled")

    def clean_password2(self):
        p1 = self.cleaned_data.get("password1")
        p2 = self.cleaned_data.get("password2")
        if p1 and p2 and p1 != p2:
            raise forms.ValidationError("Passwords don't match")
        return p2

    def save(self, commit=True):
        user = super().save(commit=False)
        user.set_password(self.cleaned_data["password1"])
        user.is_active = True
        if commit:
            user.save()
        return user


class CustomUserChangeForm(forms.ModelForm):
    password = ReadOnlyPasswordHashField(label=_("Password"))

    class Meta:
        model = CustomUser
        fields = (
            "email", "first_name", "last_name", "phone", "date_of_birth", "address",
            "password", "is_active", "is_enabled", "is_approved", "is_staff", "is_superuser", "role",
        )

    def clean_password(self):
        return self.initial["password"]


# -----------------------------
# Profile Inline
# -----------------------------
class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    verbose_name_plural = "Profile"
    verbose_name = "Background Information"
    fields = (
        "image", "bio", "qualification", "experience", "specialization",
        "linkedin", "portfolio", "verification_status", "documents_uploaded", "documents",
    )
    readonly_fields = ("documents_uploaded", "documents")
    max_num = 1
    extra = 1

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("user")


# -----------------------------
# Custom User Admin
# -----------------------------

@admin.register(CustomUser)
class CustomUserAdmin(DjangoUserAdmin):
    add_form = CustomUserCreationForm
    form = CustomUserChangeForm
    inlines = (ProfileInline,)

    list_display = ("email", "first_name", "last_name", "role", "is_approved", "is_active", "is_enabled", "date_joined")
    list_filter = ("role", "is_approved", "is_active", "is_enabled", "is_staff", "is_superuser")
    search_fields = ("email", "first_name", "last_name")
    ordering = ("-date_joined",)
    readonly_fields = ("last_login", "date_joined", "last_password_reset")
    actions = ["approve_instructors"]

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (_("Personal info"), {"fields": ("first_name", "last_name", "phone", "date_of_birth", "address")}),
        (_("Permissions"), {
            "fields": (
                "role", "is_approved", "is_active", "is_staff", "is_enabled", "is_superuser",
                "groups", "user_permissions"
            )
        }),
        (_("Important dates"), {"fields": ("last_login", "date_joined", "last_password_reset")}),
    )

    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("email", "first_name", "last_name", "phone", "role", "password1", "password2"),
        }),
    )

    def save_model(self, request, obj, form, change):
        # mark as admin-created so the profile comes from the inline
        obj._created_from_admin = True
        super().save_model(request, obj, form, change)

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        # The inline is optional; every user still needs a profile
        Profile.objects.get_or_create(user=form.instance)

    def get_readonly_fields(self, request, obj=None):
        """
        Returns a list of readonly fields for the model admin.

        If obj is provided, it appends the "role" and "email" fields to
        the list of readonly fields, otherwise it just returns the list
        of readonly fields as is.
        """
        if obj:
            return self.readonly_fields + ("role", "email")
        return self.readonly_fields

    @admin.action(description="Approve selected instructors")
    def approve_instructors(self, request, queryset):
        instructors = queryset.filter(role=CustomUser.Role.INSTRUCTOR)
        updated = instructors.update(is_approved=True)
        Profile.objects.filter(user__in=instructors).update(verification_status="approved")
        self.message_user(request, f"{updated} instructor(s) approved.")


# -----------------------------
# Hidden Admins
# -----------------------------
@admin.register(Profile)
class HiddenProfileAdmin(admin.ModelAdmin):
    search_fields = ("user__email",)

    def has_module_permission(self, request):
        return False
