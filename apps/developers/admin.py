from django.contrib import admin
from .models import DeveloperProfile, Experience, Education, PortfolioItem, Certification

admin.site.register(DeveloperProfile)
admin.site.register(Experience)
admin.site.register(Education)
admin.site.register(PortfolioItem)
admin.site.register(Certification)
