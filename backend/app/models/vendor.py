VENDORS = "Vendors"


class VendorStatus:
    PENDING_APPROVAL = "Pending Approval"
    APPROVED = "Approved"
    DECLINED = "Declined"


class VendorField:
    NAME = "Vendor Name"
    CONTACT_PERSON = "Contact Person"
    CONTACT_TITLE = "Contact Title"
    EMAIL = "Email"
    PHONE = "Phone"
    WEBSITE = "Website"
    COUNTRY = "Country"
    COMPANY_SIZE = "Company Size"
    SERVICES = "Services"
    PASSWORD_HASH = "Password Hash"
    NDA_ON_FILE = "NDA on File"
    NDA_FILE_NAME = "NDA File Name"
    NDA_URL = "NDA Cloudinary URL"
    NDA_STORAGE_ID = "NDA Cloudinary Public ID"
    NDA_VIEW_URL = "NDA View URL"
    STATUS = "Status"
    APPROVAL_DATE = "Approval Date"
    APPROVED_BY = "Approved By"
    LAST_LOGIN = "Last Login"
