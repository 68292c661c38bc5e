from phonebook.main import main

main()
