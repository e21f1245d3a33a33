from models.academic_year import AcademicYear
from models.announcement import Announcement
from models.class_subject import ClassSubject
from models.room import Room
from models.school_class import SchoolClass
from models.section import Section
from models.student import Enrollment, Student
from models.subject import Subject
from models.teacher import Teacher
from models.term import Term
from models.timetable import Timetable
from models.timetable_slot import TimetableSlot
from models.user import Role, User, UserRole

__all__ = [
	"AcademicYear",
	"Announcement",
	"ClassSubject",
	"Enrollment",
	"Role",
	"Room",
	"SchoolClass",
	"Section",
	"Student",
	"Subject",
	"Teacher",
	"Term",
	"Timetable",
	"TimetableSlot",
	"User",
	"UserRole",
]
