from django.contrib import admin

from registrations.models import Child, Event, Guardian, RegisteredChild, RegisteredUser, Waiver


class RegisteredUserInline(admin.TabularInline):
    model = RegisteredUser
    extra = 0
    readonly_fields = ["guardian", "registered_at"]
    can_delete = False


class RegisteredChildInline(admin.TabularInline):
    model = RegisteredChild
    extra = 0
    readonly_fields = ["guardian", "child", "registered_at"]
    can_delete = False


class ChildInline(admin.TabularInline):
    model = Child
    extra = 0
    fields = ["first_name", "last_name", "birthday"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "start_date", "registration_deadline", "capacity"]
    search_fields = ["title", "location"]
    inlines = [RegisteredUserInline, RegisteredChildInline]


@admin.register(Guardian)
class GuardianAdmin(admin.ModelAdmin):
    list_display = ["first_name", "last_name", "email", "role"]
    list_filter = ["role"]
    search_fields = ["first_name", "last_name", "email"]
    exclude = ["registered_events", "waivers_signed"]
    inlines = [ChildInline]


@admin.register(Waiver)
class WaiverAdmin(admin.ModelAdmin):
    list_display = ["file_name", "type", "event", "belongs_to", "is_for_child", "uploaded_at"]
    list_filter = ["type", "event"]
    readonly_fields = ["uploaded_at"]
