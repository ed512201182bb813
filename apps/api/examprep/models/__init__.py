from examprep.models.subject import ExamSubject
from examprep.models.module import ExamModule
from examprep.models.module_file import ExamModuleFile
from examprep.models.question import ExamQuestion
from examprep.models.flashcard import ExamFlashcard

__all__ = ["ExamSubject", "ExamModule", "ExamModuleFile", "ExamQuestion", "ExamFlashcard"]
